"""
Pytest configuration: show each test's docstring summary as its name.

Based on https://medium.com/@dsmd90/python-displayname-analog-from-java-6a1d1ad3c468
"""


def _docstring_summary(function):
    """Return the first non-blank docstring line of a test, or None."""
    docstring = function.__doc__
    if not docstring:
        return None
    for line in docstring.strip().splitlines():
        if line.strip():
            return line.strip()
    return None


def pytest_collection_modifyitems(items):
    """Rename collected tests after their docstring summaries."""
    for item in items:
        summary = _docstring_summary(item.function)
        if not summary:
            continue

        # Parametrized tests keep their "[...]" id suffix
        bracket = item.nodeid.find("[")
        parameter_id = item.nodeid[bracket:] if bracket != -1 else ""
        item._nodeid = summary + parameter_id
