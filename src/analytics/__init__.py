from .violations import Violation, assess_violations, highest_severity

__all__ = ["Violation", "assess_violations", "highest_severity"]
