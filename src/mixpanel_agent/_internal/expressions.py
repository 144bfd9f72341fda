"""Filter expression construction for the Mixpanel export API.

Export filters use Mixpanel's expression syntax, with properties referenced
through the ``properties["name"]`` accessor.
"""

from __future__ import annotations


def property_accessor(name: str) -> str:
    """Wrap a property name in properties[] accessor syntax.

    Double quotes and backslashes in the name are escaped.

    Examples:
        >>> property_accessor("Source")
        'properties["Source"]'
        >>> property_accessor('my"property')
        'properties["my\\\\"property"]'
    """
    # Backslashes first so the quote escapes are not doubled
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'properties["{escaped}"]'


def boolean_filter_expression(property_name: str, value: bool) -> str:
    """Build an expression matching events whose property equals a boolean.

    Args:
        property_name: Property to test.
        value: Boolean to compare against.

    Returns:
        Expression such as ``boolean(properties["Paid"]) == true``.

    Raises:
        TypeError: If value is not a bool.

    Examples:
        >>> boolean_filter_expression("Paid", True)
        'boolean(properties["Paid"]) == true'
    """
    if not isinstance(value, bool):
        raise TypeError(f"value must be a bool, got {type(value).__name__}")
    literal = "true" if value else "false"
    return f"boolean({property_accessor(property_name)}) == {literal}"
