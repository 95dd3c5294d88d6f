"""
Gatherly Backend — Repositories
=================================

What:  Aggregate loading and transactional saving on top of AsyncSession.
Why:   Workflows talk to "load the user with photos" and "save changes, tell
       me how many entities changed", not to SQL. Tests can substitute an
       AsyncMock with the same surface.
"""
