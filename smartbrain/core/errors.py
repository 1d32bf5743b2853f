"""
Exception types raised by the SmartBrain core
"""


class SmartBrainError(Exception):
    """Base class for all SmartBrain errors"""


class InvalidTransition(SmartBrainError):
    """A command was invoked from a lifecycle state that forbids it"""

    def __init__(self, command: str, state):
        self.command = command
        self.state = state
        state_name = getattr(state, "value", state)
        super().__init__(f"Cannot {command} while {state_name}")


class BufferInvariantViolation(SmartBrainError):
    """The history buffer grew past its capacity"""

    def __init__(self, size: int, capacity: int):
        self.size = size
        self.capacity = capacity
        super().__init__(f"History buffer holds {size} points, capacity is {capacity}")
