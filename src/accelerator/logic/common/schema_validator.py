"""
Request body validation against Pydantic models.

Validation is strict: values are never coerced, so "5" is not a number.
Fields the model does not declare are dropped from the result.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from accelerator.handlers.utils.errors import BadRequestError, ValidationError
from accelerator.handlers.utils.observability import logger

T = TypeVar('T', bound=BaseModel)

VALIDATION_ERROR_MESSAGE = 'Validation errors detected with the provided body'


class ParameterErrorIssue(str, Enum):
    REQUIRED = 'required'
    MALFORMED = 'malformed'
    EMPTY = 'empty'
    MAX_CHARACTERS_EXCEEDED = 'maxCharactersExceeded'
    INVALID = 'invalid'


_ERROR_TYPE_ISSUES = {
    'missing': ParameterErrorIssue.REQUIRED,
    'string_too_short': ParameterErrorIssue.EMPTY,
    'too_short': ParameterErrorIssue.EMPTY,
    'string_too_long': ParameterErrorIssue.MAX_CHARACTERS_EXCEEDED,
    'too_long': ParameterErrorIssue.MAX_CHARACTERS_EXCEEDED,
    'extra_forbidden': ParameterErrorIssue.INVALID,
}


def _issue_for(error_type: str) -> ParameterErrorIssue:
    if error_type in _ERROR_TYPE_ISSUES:
        return _ERROR_TYPE_ISSUES[error_type]
    if error_type.endswith('_type') or error_type.endswith('_parsing'):
        return ParameterErrorIssue.MALFORMED
    return ParameterErrorIssue.INVALID


class SchemaValidator:
    """Turns a raw JSON request body into a validated model instance."""

    def validate_model(self, body: Optional[str], model: Type[T]) -> T:
        """
        Parse and validate a JSON body.

        Args:
            body: Raw request body
            model: Pydantic model the body must satisfy

        Returns:
            The validated model, without undeclared fields

        Raises:
            BadRequestError: If the body is not valid JSON
            ValidationError: If the body does not satisfy the model, with one {param, issue} entry per problem
        """
        try:
            parsed = json.loads(body) if body else None
        except ValueError as exc:
            raise BadRequestError(f'Invalid JSON in request body: {exc}') from exc

        # An empty body or a JSON null validates as an empty object
        payload = body if parsed is not None else '{}'
        try:
            return model.model_validate_json(payload, strict=True)
        except PydanticValidationError as exc:
            issues = self._to_parameter_issues(exc)
            logger.info('Request body failed validation', extra={'model': model.__name__, 'issues': issues})
            raise ValidationError(VALIDATION_ERROR_MESSAGE, issues) from exc

    @staticmethod
    def _to_parameter_issues(exc: PydanticValidationError) -> List[Dict[str, Any]]:
        issues = []
        for error in exc.errors():
            param = '.'.join(str(part) for part in error['loc'])
            issues.append({'param': param, 'issue': _issue_for(error['type']).value})
        return issues
