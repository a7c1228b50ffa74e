"""
Auth Module Tests
----------------
Tokens, guards, the auth controller, the HTTP surface and the remote client.
"""
