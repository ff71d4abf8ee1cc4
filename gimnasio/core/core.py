from typing import Any, List

def allowed_roles(current_user: Any, required_roles: List[str]) -> bool:
    """
    Verifica si el rol del usuario actual está entre los roles permitidos.

    current_user es el objeto retornado por get_current_user y tiene el
    atributo 'rol'.
    """
    user_role = (current_user.rol or "").lower()
    return user_role in [r.lower() for r in required_roles]
