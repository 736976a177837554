"""Sample runnable units used by the test-suite."""
