def assert_close(actual, expected, variance=1, msg=None):
    """``actual`` within ``variance`` of ``expected`` (inclusive), all in integer units."""
    actual, expected, variance = int(actual), int(expected), int(variance)
    diff = abs(actual - expected)
    assert diff <= variance, msg or (
        f"{actual} is not within {variance} of {expected} (off by {diff})"
    )
