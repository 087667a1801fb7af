"""
Pytest 配置和共享 fixtures
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.models import ontology  # noqa: F401
from app.security.auth import get_password_hash, create_access_token
from app.security.permissions import Permission
from app.system.models.rbac import Role, UserRole
from app.system.models.user import AuthUser, Profile
from app.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎（连接时自动开启外键约束）"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== 角色 / 用户 Fixtures ==============

def create_role(db, name, permissions, is_system_role=False):
    """直接写入角色（绕过服务层校验，便于构造历史数据）"""
    role = Role(
        name=name,
        description=f"{name} role",
        permissions=[p.value if isinstance(p, Permission) else p for p in permissions],
        is_system_role=is_system_role,
    )
    db.add(role)
    db.commit()
    db.refresh(role)
    return role


def create_user(db, email, roles=(), password="123456", password_reset_required=False,
                full_name=None):
    """创建认证用户 + 资料，并分配给定角色"""
    user = AuthUser(
        email=email,
        password_hash=get_password_hash(password),
        full_name=full_name or email.split("@")[0],
        is_active=True,
    )
    db.add(user)
    db.flush()
    db.add(Profile(
        user_id=user.id, email=email, full_name=user.full_name,
        password_reset_required=password_reset_required,
    ))
    for role in roles:
        db.add(UserRole(user_id=user.id, role_id=role.id, is_active=True))
    db.commit()
    db.refresh(user)
    return user


def bearer(user):
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def make_role(db_session):
    """角色工厂"""
    def _make(name, permissions, is_system_role=False):
        return create_role(db_session, name, permissions, is_system_role)
    return _make


@pytest.fixture
def make_user(db_session):
    """用户工厂"""
    def _make(email, roles=(), **kwargs):
        return create_user(db_session, email, roles, **kwargs)
    return _make


@pytest.fixture
def headers_for():
    """为任意用户生成认证请求头"""
    return bearer


@pytest.fixture
def admin_role(db_session):
    """内置管理员角色（全部权限）"""
    return create_role(db_session, "Administrator", list(Permission), is_system_role=True)


@pytest.fixture
def front_desk_role(db_session):
    """前台角色"""
    return create_role(db_session, "Front Desk", [
        Permission.ROOMS_VIEW, Permission.BOOKINGS_VIEW, Permission.BOOKINGS_CREATE,
    ])


@pytest.fixture
def staff_manager_role(db_session):
    """人事管理角色（非管理员名称，但拥有 staff.manage）"""
    return create_role(db_session, "HR", [Permission.STAFF_VIEW, Permission.STAFF_MANAGE])


@pytest.fixture
def admin_user(db_session, admin_role):
    return create_user(db_session, "admin@hotel.test", roles=[admin_role], full_name="管理员")


@pytest.fixture
def front_desk_user(db_session, front_desk_role):
    return create_user(db_session, "front@hotel.test", roles=[front_desk_role], full_name="前台小王")


@pytest.fixture
def no_role_user(db_session):
    return create_user(db_session, "nobody@hotel.test")


@pytest.fixture
def reset_required_user(db_session, admin_role):
    return create_user(db_session, "new@hotel.test", roles=[admin_role], password_reset_required=True)


@pytest.fixture
def admin_headers(admin_user):
    """返回管理员认证的请求头"""
    return bearer(admin_user)


@pytest.fixture
def front_desk_headers(front_desk_user):
    """返回前台认证的请求头"""
    return bearer(front_desk_user)


@pytest.fixture
def no_role_headers(no_role_user):
    """返回无任何角色用户的请求头"""
    return bearer(no_role_user)


@pytest.fixture
def reset_required_headers(reset_required_user):
    """返回需强制改密用户的请求头"""
    return bearer(reset_required_user)
