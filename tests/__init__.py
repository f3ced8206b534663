"""Test suite for the formengine form validation engine.

This package contains tests for:
- Rule catalog and field validation (first failing rule wins)
- Password / confirm-password cross-field checks
- Submission state machine transitions
- Event system (emission, serialization)
- FormEngine edit, blur, submit and reset behaviour
- Declarative rule-set configuration
"""
