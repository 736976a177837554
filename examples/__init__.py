"""Example integrations for runnerkit."""
