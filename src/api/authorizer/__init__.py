"""Authorizer bounded context.

Turns an API Gateway authorizer event and an already-authenticated principal
into an authorizer response, using the Policy context's builder.
"""
