"""
Structural comparison of deployed mappings against their definitions.

Both sides are JSON-shaped trees (dicts, lists and scalars). Every node is
classified by 'node_kind' and the walk never stops at the first divergence:
all mismatches are collected so a single verification reports them all.
"""
from collections import namedtuple
import logging
import json

logger = logging.getLogger(__name__)

MISSING = 'missing'
OBJECT = 'object'
ARRAY = 'array'
SCALAR = 'scalar'

MISSING_FIELD = "missing field"
MISSING_DEFINITION = "missing definition"
MISSING_INDEX = "missing index"
MISSING_ALIAS = "missing alias"

# keyword holding the field definitions of an object; elided from paths
PROPERTIES = 'properties'


class Mismatch(namedtuple('Mismatch', ['path', 'description', 'index'], defaults=(None,))):
    """
    A divergence at 'path'. Type mismatches also name the 'index' holding
    the type.
    """
    __slots__ = ()

    def __str__(self):
        if self.index is None:
            return "{}: {}".format(self.path, self.description)
        return "{}/{}: {}".format(self.index, self.path, self.description)


class ComparisonResult:
    def __init__(self, mismatches=None):
        self.mismatches = list(mismatches or [])

    def __repr__(self):
        return "<ComparisonResult: matched={} ({} mismatches)>".format(
            self.matched, len(self.mismatches)
        )

    def __bool__(self):
        return self.matched

    def __add__(self, other):
        return ComparisonResult(self.mismatches + other.mismatches)

    @property
    def matched(self):
        return not self.mismatches

    def add(self, path, description, index=None):
        self.mismatches.append(Mismatch(path, description, index))

    def extend(self, other):
        self.mismatches.extend(other.mismatches)


def node_kind(value):
    if value is None:
        return MISSING
    if isinstance(value, dict):
        return OBJECT
    if isinstance(value, (list, tuple)):
        return ARRAY
    return SCALAR


def normalize(value):
    """
    Returns the canonical form of a scalar: booleans are compared by their
    JSON text so that 'True' and '"true"' are equal.
    """
    if isinstance(value, bool):
        return json.dumps(value)
    return value


def render(value):
    if node_kind(value) in (OBJECT, ARRAY):
        return json.dumps(value, sort_keys=True)
    return str(normalize(value))


def _child_path(path, key, container):
    if key == PROPERTIES and not container:
        return path
    return "{}.{}".format(path, key) if path else str(key)


def _compare(path, deployed, expected, result, container=False):
    (deployed_kind, expected_kind) = (node_kind(deployed), node_kind(expected))
    found = len(result.mismatches)

    if deployed_kind == MISSING or expected_kind == MISSING:
        if deployed_kind == MISSING and expected_kind != MISSING:
            logger.error("Missing field: {}".format(path))
            result.add(path, MISSING_FIELD)
        elif expected_kind == MISSING and deployed_kind != MISSING:
            logger.error("Missing definition: {}".format(path))
            result.add(path, MISSING_DEFINITION)

    elif deployed_kind != expected_kind:
        msg = "mismatch: {} <> {}".format(render(deployed), render(expected))
        logger.error("Mismatch field: {} ({})".format(path, msg))
        result.add(path, msg)

    elif deployed_kind == OBJECT:
        for key in sorted(set(deployed) | set(expected)):
            _compare(
                _child_path(path, key, container),
                deployed.get(key),
                expected.get(key),
                result,
                container=(key == PROPERTIES and not container)
            )

    elif deployed_kind == ARRAY:
        for position in range(max(len(deployed), len(expected))):
            _compare(
                "{}[{}]".format(path, position),
                deployed[position] if position < len(deployed) else None,
                expected[position] if position < len(expected) else None,
                result
            )

    elif normalize(deployed) != normalize(expected):
        msg = "mismatch: {} <> {}".format(render(deployed), render(expected))
        logger.error("Mismatch field: {} ({})".format(path, msg))
        result.add(path, msg)

    if logger.isEnabledFor(logging.DEBUG):
        state = "ok" if len(result.mismatches) == found else "failed!"
        logger.debug("field '{}': {}".format(path, state))

    return result


def compare(path, deployed, expected):
    """
    Compares the 'deployed' tree against the 'expected' tree rooted at 'path'.
    """
    return _compare(path, deployed, expected, ComparisonResult())


def aliases_match(deployed_aliases, expected_aliases):
    """
    Checks that every expected alias exists and targets the expected index.

    'deployed_aliases' maps alias names to '{"index": name}' as reported by
    the cluster; 'expected_aliases' maps alias names to index names.
    """
    result = ComparisonResult()

    for name in sorted(expected_aliases or {}):
        target = expected_aliases[name]
        alias = deployed_aliases.get(name)
        if alias is None:
            logger.error("Missing alias: {}".format(name))
            result.add(name, MISSING_ALIAS)
        elif alias.get('index') != target:
            logger.error("Broken alias: {} (index '{}')".format(name, alias.get('index')))
            result.add(name, "broken alias: {} <> {}".format(alias.get('index'), target))
        else:
            logger.info("Correct alias: {} (index '{}')".format(name, target))

    return result


def mappings_valid(deployed_mappings, expected_mappings, deployed_aliases, expected_aliases):
    """
    Verifies every expected index and alias against the cluster report.

    'deployed_mappings' and 'expected_mappings' both have the shape
    '{index: {type: mapping}}'. An index missing from the cluster is a single
    mismatch; its types are not compared.
    """
    indices = ComparisonResult()

    for index in sorted(expected_mappings):
        if deployed_mappings.get(index) is None:
            logger.error("Missing index: {}".format(index))
            indices.add(index, MISSING_INDEX)
            continue

        logger.info("Verifying index: {}".format(index))
        (deployed, expected) = (deployed_mappings[index], expected_mappings[index])

        result = ComparisonResult()
        for doc_type in sorted(set(deployed) | set(expected)):
            _compare(doc_type, deployed.get(doc_type), expected.get(doc_type), result)

        if result.matched:
            logger.info("Correct index: {} (mapping deployed)".format(index))
        else:
            logger.error("Broken index: {} (mapping does not match definition)".format(index))
            for mismatch in result.mismatches:
                logger.error("Broken index: {} ({})".format(index, mismatch))
        indices.extend(ComparisonResult(m._replace(index=index) for m in result.mismatches))

    logger.info("Verification indices: {}".format("ok" if indices.matched else "failed"))

    aliases = aliases_match(deployed_aliases, expected_aliases)
    logger.info("Verification aliases: {}".format("ok" if aliases.matched else "failed"))

    return indices + aliases
