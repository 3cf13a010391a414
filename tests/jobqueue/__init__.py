"""
Job Queue Test Suite.

- State transition tests (lifecycle)
- Store ordering and eligibility tests
- Repository claim/cancel atomicity tests
- Executor outcome distribution tests
- Dispatcher loop tests
- End-to-end scenarios
"""
