"""runnerkit test-suite."""
