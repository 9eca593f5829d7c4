"""
Expression building blocks for the DynamoDB data access layer.

DynamoDB has a long list of reserved words, so every attribute name that goes
into an expression is replaced by a '#name' placeholder and every value by a
':name' placeholder. The classes here hold the request-scoped parameters the
repository accepts and accumulate the placeholder maps and expression
fragments for a single request.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from accelerator.handlers.utils.errors import ConfigurationError

AttributeValue = Union[str, int, float, Decimal, bool, None, List[Any], Dict[str, Any]]
AttributeMap = Dict[str, AttributeValue]
ExpressionAttributeNameMap = Dict[str, str]
ExpressionAttributeValueMap = Dict[str, AttributeValue]

NEGATION_VALUE_PREFIX = 'not_'


@dataclass(frozen=True)
class TableSchema:
    """Key layout of a table. Bound once per repository."""

    table_name: str
    partition_key_name: str
    sort_key_name: Optional[str] = None


@dataclass
class FilterInputParams:
    """
    Equality filters for a query or a scan.

    Example:
        FilterInputParams(
            filters={'status': ['active', 'pending']},  # status is active OR pending
            negation_filters={'deleted': [True]},      # AND deleted is not true
            fields=['score'],                          # only return score (plus the key)
        )
    """

    filters: Dict[str, Any] = field(default_factory=dict)
    negation_filters: Dict[str, Any] = field(default_factory=dict)
    fields: Optional[List[str]] = None


@dataclass
class QueryInputParams:
    """
    Key condition for a query on the base table, an LSI or a GSI.

    partition_key_name only needs to be set when querying a GSI whose
    partition key differs from the table's.
    """

    partition_key_value: AttributeValue
    index_name: Optional[str] = None
    partition_key_name: Optional[str] = None
    sort_key_name: Optional[str] = None
    sort_key_value: AttributeValue = None


@dataclass
class FilterParams:
    filter_expression: str
    expression_attribute_names: ExpressionAttributeNameMap
    expression_attribute_values: ExpressionAttributeValueMap


@dataclass
class ProjectionParams:
    projection_expression: str
    expression_attribute_names: ExpressionAttributeNameMap


@dataclass
class TransactPut:
    """Overwrite a whole record inside a transaction."""

    record: AttributeMap


@dataclass
class TransactUpdate:
    """Partially update a record inside a transaction. The record must carry its key."""

    record: AttributeMap


@dataclass
class TransactDelete:
    """Delete the record with this key inside a transaction."""

    partition_key_value: AttributeValue
    sort_key_value: AttributeValue = None


TransactionWriteItem = Union[TransactPut, TransactUpdate, TransactDelete]


class ExpressionBuilder:
    """Accumulates placeholder maps and expression fragments for one request."""

    def __init__(self) -> None:
        self.names: ExpressionAttributeNameMap = {}
        self.values: ExpressionAttributeValueMap = {}
        self.key_condition_expression = ''
        self.filter_expression = ''
        self.projection_expression = ''
        self.update_expression = ''

    def add_names(self, names: Mapping[str, str]) -> 'ExpressionBuilder':
        _merge_aliases(self.names, names)
        return self

    def add_values(self, values: Mapping[str, AttributeValue]) -> 'ExpressionBuilder':
        _merge_aliases(self.values, values)
        return self

    def add_filter(self, filter_params: FilterParams) -> 'ExpressionBuilder':
        self.filter_expression = filter_params.filter_expression
        return self.add_names(filter_params.expression_attribute_names).add_values(
            filter_params.expression_attribute_values
        )

    def add_negation_filter(self, filter_params: FilterParams) -> 'ExpressionBuilder':
        negation = f'NOT {filter_params.filter_expression}'
        # Parens only go around the NOT clause when it follows a positive clause
        if self.filter_expression:
            self.filter_expression = f'{self.filter_expression} AND ({negation})'
        else:
            self.filter_expression = negation
        return self.add_names(filter_params.expression_attribute_names).add_values(
            filter_params.expression_attribute_values
        )

    def add_projection(self, projection_params: ProjectionParams) -> 'ExpressionBuilder':
        self.projection_expression = projection_params.projection_expression
        return self.add_names(projection_params.expression_attribute_names)

    def finalize(self) -> Dict[str, Any]:
        """
        Return the request parameters built so far.

        DynamoDB rejects empty expressions and empty placeholder maps, so
        anything empty is left out instead of being sent.
        """
        params: Dict[str, Any] = {}
        if self.key_condition_expression:
            params['KeyConditionExpression'] = self.key_condition_expression
        if self.filter_expression:
            params['FilterExpression'] = self.filter_expression
        if self.projection_expression:
            params['ProjectionExpression'] = self.projection_expression
        if self.update_expression:
            params['UpdateExpression'] = self.update_expression
        if self.names:
            params['ExpressionAttributeNames'] = dict(self.names)
        if self.values:
            params['ExpressionAttributeValues'] = dict(self.values)
        return params


def _merge_aliases(target: Dict[str, Any], aliases: Mapping[str, Any]) -> None:
    """
    Add placeholders to a request map.

    Raises:
        ConfigurationError: If a placeholder is already bound to something else
    """
    for alias, bound in aliases.items():
        if alias in target and target[alias] != bound:
            raise ConfigurationError(f'The placeholder "{alias}" is used for two different values.')
        target[alias] = bound


def _as_value_list(values: Any) -> List[AttributeValue]:
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return [values]


def build_filter_expression(filters: Mapping[str, Any], value_prefix: str = '') -> FilterParams:
    """
    Build an equality filter: values of one attribute are OR'ed, attributes are AND'ed.

    A single attribute yields '(#a = :a0 OR #a = :a1)'. Several attributes are
    wrapped in one more group, '((#a = :a0) AND (#b = :b0))', so the result can
    be combined with other clauses. A lone attribute must not get that extra
    group because DynamoDB rejects the redundant parentheses.
    """
    names: ExpressionAttributeNameMap = {}
    values: ExpressionAttributeValueMap = {}
    clauses: List[str] = []

    for attribute, candidates in filters.items():
        candidates = _as_value_list(candidates)
        if not candidates:
            raise ConfigurationError(f'The filter on "{attribute}" needs at least one value.')

        name_alias = f'#{attribute}'
        names[name_alias] = attribute

        comparisons = []
        for index, candidate in enumerate(candidates):
            value_alias = f':{value_prefix}{attribute}{index}'
            # 'a' with eleven values and 'a1' both produce ':a10'
            while value_alias in values:
                value_alias += '_'
            values[value_alias] = candidate
            comparisons.append(f'{name_alias} = {value_alias}')
        clauses.append('(' + ' OR '.join(comparisons) + ')')

    expression = ' AND '.join(clauses)
    if len(clauses) > 1:
        expression = f'({expression})'

    return FilterParams(
        filter_expression=expression,
        expression_attribute_names=names,
        expression_attribute_values=values,
    )


def build_projection_expression(fields: Iterable[str], key_names: Iterable[str]) -> ProjectionParams:
    """
    Build a projection over the given fields plus the key attributes.

    The key must always be projected and DynamoDB rejects a name that appears
    twice, so fields are de-duplicated before placeholders are made.
    """
    projected: List[str] = []
    for name in list(fields) + [key for key in key_names if key]:
        if name not in projected:
            projected.append(name)

    names = {f'#{name}': name for name in projected}
    return ProjectionParams(
        projection_expression=','.join(names),
        expression_attribute_names=names,
    )
