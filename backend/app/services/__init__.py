# Service layer. Import concrete modules directly, e.g.
#   from app.services.boarding_service import boarding_service
