# Services package init
"""
Gatherly Backend — Services Layer
===================================

What:  Workflows between the routes (HTTP) and the repositories (persistence).
How:   Services receive their collaborators in the constructor, apply the
       business rules and return Result values (or None for "not found").
       They are built per request by the providers in app.dependencies.

Service Inventory:
    - MediaGateway (abstract) / CloudinaryMediaGateway: image host access
    - UserAccessor: who the caller is
    - UserLockRegistry: per-user serialization of photo workflows
    - PhotoService: attach, set main, delete
    - ActivityService: activity CRUD and attendance
    - ProfileService: profile lookup
    - AccountService: register, login, current user
"""
