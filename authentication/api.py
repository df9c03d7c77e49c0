from ninja import Router

from authentication.identity import get_or_create_identity
from authentication.schemas import UserInSchema, UserOutSchema

router = Router()


@router.post("", response={201: UserOutSchema}, by_alias=True)
def upsert_user(request, data: UserInSchema):
    """
    Record the identity behind a verified email.

    Called on first sign-in; repeating the call returns the stored identity
    unchanged.
    """
    identity = get_or_create_identity(
        data.email,
        name=data.name,
        role=data.role.value if data.role else None,
    )
    return 201, identity
