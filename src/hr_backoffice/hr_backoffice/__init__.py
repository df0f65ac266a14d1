"""HR back office package.

Organized by feature modules (users, calendar_rules, pto, ...) with a thin
Flask action layer on top of service/repository layers.
"""
