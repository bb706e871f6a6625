from rule_screening.evaluation.orchestrator import EvaluationOrchestrator, error_justification

__all__ = ["EvaluationOrchestrator", "error_justification"]
