class PoseCoachError(Exception):
    """Base class for errors raised while setting up an analyzer."""


class ConfigurationError(PoseCoachError):
    """Exercise configuration file is missing, malformed or incomplete."""


class ExerciseNotImplementedError(PoseCoachError):
    """No transition logic is registered for the requested exercise."""
