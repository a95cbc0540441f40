"""
NeuralPrep - adaptive review engine for an exam-prep question bank.

Quick start:
    from neuralprep import sm2, session_builders
    from neuralprep.runtime import SessionRuntime, SessionConfig

    questions = store.load_question_pool(scope)
    performance = store.load_performance_map(user_id)
    selection = session_builders.build_session_questions(
        "smart", questions, performance, count=20
    )
    runtime = SessionRuntime(store, user_id)
    runtime.init_session(selection, SessionConfig(), session_type="smart")
"""

__version__ = "1.0.0"
