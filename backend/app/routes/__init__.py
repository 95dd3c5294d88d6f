# Routes package init
"""
Gatherly Backend — API Routes Package
=======================================

Route Inventory:
    - account.py:     POST /api/account/login, POST /api/account/register,
                      GET  /api/account
    - activities.py:  GET/POST /api/activities, GET/PUT/DELETE /api/activities/{id},
                      POST /api/activities/{id}/attend
    - profiles.py:    GET  /api/profiles/{username}
    - photos.py:      POST /api/photos, POST /api/photos/{id}/setmain,
                      DELETE /api/photos/{id}
    - health.py:      GET  /health
    - results.py:     Result → HTTP status mapping shared by the above

Routes stay thin: read the request, call one service method, hand its
outcome to handle_result().
"""
