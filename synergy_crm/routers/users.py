from synergy_crm.routers.base import build_entity_router
from synergy_crm.services.user_service import user_service

router = build_entity_router(user_service, path="auth-users", payload_key="user", tag="Users", extra_body_keys=("password",))
