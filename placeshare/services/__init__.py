"""
PlaceShare Backend: Services
============================

What:  Business logic between the routes and the repositories.

    place_service     orchestration of every place operation
    place_writer      atomic create/delete, owner-only update (Result based)
    ownership         OwnershipGuard
    geocoding         address → coordinates (Google Maps or static)
    file_service      image validation and storage
    resource_cleaner  background removal of image files
    user_service      signup, login, listing
"""
