"""HTTP controllers, one `APIRouter` per area.

Controllers are intentionally thin: they accept requests, check access
through the dependencies in `venturehub.auth`, delegate to services and
return JSON.
"""
