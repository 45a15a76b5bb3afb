"""Utility modules."""

from .parser import extract_json_object, parse_evaluation_response

__all__ = ["extract_json_object", "parse_evaluation_response"]
