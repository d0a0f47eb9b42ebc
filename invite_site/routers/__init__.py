from invite_site.routers.healthz import router as healthz

__all__ = [
    "healthz",
]
