"""Shared Kernel module.

Components shared by the Policy and Authorizer contexts: the resource
locator model, the authorization enums and errors, and the observation
context bound to domain probes. Changes here affect both contexts.
"""
