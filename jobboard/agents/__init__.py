"""
Agents for the Job Board.

- evaluator: LLM screening of applications against job requirements
"""

from jobboard.agents.evaluator import DeepSeekEvaluator, build_evaluator

__all__ = ["DeepSeekEvaluator", "build_evaluator"]
