"""
PlaceShare Backend: Routers

    places   /api/places/...
    users    /api/users/...
    uploads  /uploads/images/{filename}
    health   /health
"""
