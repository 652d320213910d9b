"""Policy bounded context.

Accumulates allow/deny rules for API Gateway methods and compiles them into
authorizer policy documents.
"""
