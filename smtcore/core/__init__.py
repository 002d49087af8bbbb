"""smtcore/core — Types, configuration, exceptions and validators."""
