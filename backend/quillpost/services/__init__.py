# Services package init
"""
Quillpost Backend — Services Package
======================================

Collaborators the request pipeline and routes depend on:
    - credential_base.py: CredentialValidator interface + CredentialCheck result
    - token_service.py:   JWTCredentialValidator (PyJWT)
    - article_service.py: tenant-scoped article store
"""
