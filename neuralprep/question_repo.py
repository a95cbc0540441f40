"""
MongoDB repository for the question bank.

Provides functions to query questions by subject/chapter scope. Question
documents live in one flat collection, each tagged with its subject and
chapter (ids plus display names).
"""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from neuralprep import settings
from neuralprep.errors import PersistenceFailure
from neuralprep.schemas import Question, QuestionScope

logger = logging.getLogger(__name__)

# Configuration
COLLECTION_NAME = "questions"

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None
_collection: Optional[Collection] = None


# ---- Connection Management ----

def get_collection() -> Collection:
    """
    Get a connection to the MongoDB question collection.

    Uses a persistent connection pool that's reused across requests.

    Returns:
        MongoDB collection object
    """
    global _client, _collection

    if _collection is not None:
        return _collection

    _client = MongoClient(
        settings.get_mongo_uri(),
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    db = _client[settings.get_mongo_db_name()]
    _collection = db[COLLECTION_NAME]

    return _collection


def close_connection() -> None:
    global _client, _collection
    if _client is not None:
        _client.close()
    _client = None
    _collection = None


# ---- Document Mapping ----

def question_from_document(doc: dict) -> Question:
    """
    Convert a MongoDB document to a Question.

    The document id may be stored as "id" or as Mongo's "_id".
    """
    data = {key: value for key, value in doc.items() if key != "_id"}
    if "id" not in data and "_id" in doc:
        data["id"] = str(doc["_id"])
    return Question.model_validate(data)


def question_to_document(question: Question) -> dict:
    doc = question.model_dump(mode="json")
    doc["_id"] = question.id
    return doc


def build_scope_query(scope: Optional[QuestionScope]) -> dict:
    """
    Build the Mongo filter for a subject/chapter scope.
    """
    query: dict = {}
    if scope is None:
        return query
    if not scope.all_subjects():
        query["subject_id"] = {"$in": list(scope.subject_ids)}
    if not scope.all_chapters():
        query["chapter_id"] = {"$in": list(scope.chapter_ids)}
    return query


# ---- Query Functions ----

def load_question_pool(
    scope: Optional[QuestionScope] = None,
    collection: Optional[Collection] = None
) -> list[Question]:
    """
    Load every question in scope, ordered by subject, chapter and id.

    Malformed documents are logged and left out of the pool.
    """
    collection = collection if collection is not None else get_collection()
    query = build_scope_query(scope)

    try:
        cursor = collection.find(query).sort([
            ("subject_id", ASCENDING),
            ("chapter_id", ASCENDING),
            ("_id", ASCENDING),
        ])
        documents = list(cursor)
    except PyMongoError as exc:
        raise PersistenceFailure("Could not load question pool") from exc

    questions: list[Question] = []
    for doc in documents:
        try:
            questions.append(question_from_document(doc))
        except ValidationError as exc:
            logger.warning("Skipping malformed question %s: %s", doc.get("_id"), exc)
    return questions


def get_question_by_id(
    question_id: str,
    collection: Optional[Collection] = None
) -> Optional[Question]:
    collection = collection if collection is not None else get_collection()
    try:
        doc = collection.find_one({"_id": question_id})
    except PyMongoError as exc:
        raise PersistenceFailure(f"Could not load question {question_id}") from exc
    return question_from_document(doc) if doc else None


def upsert_question(question: Question, collection: Optional[Collection] = None) -> None:
    """
    Insert or replace a question document.
    """
    collection = collection if collection is not None else get_collection()
    try:
        collection.replace_one({"_id": question.id}, question_to_document(question), upsert=True)
    except PyMongoError as exc:
        raise PersistenceFailure(f"Could not save question {question.id}") from exc
