class SantaError(RuntimeError):
    pass


class ConfigurationError(SantaError):
    pass


class InfeasibleAssignmentError(SantaError):
    pass


class NotificationError(SantaError):
    pass
