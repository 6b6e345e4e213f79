from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.shared.database.models import User
from app.core.auth.service import AuthService

security = HTTPBearer()

class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Obtener usuario actual desde el token"""
    
    # Verificar token
    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Token inválido o expirado")
    
    # Obtener user_id del payload
    user_id: int = payload.get("user_id")
    if user_id is None:
        raise AuthenticationError("Payload del token inválido")
    
    user = db.query(User).filter(User.id == user_id).first()
    
    if user is None:
        raise AuthenticationError("Usuario no encontrado")
    
    if not user.is_active:
        raise AuthenticationError("Usuario inactivo")
    
    return user

async def get_current_owner_id(current_user: User = Depends(get_current_user)) -> int:
    """Clave de tenant: todas las entidades se filtran por este owner_id"""
    return current_user.id
