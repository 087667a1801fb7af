"""
core/security/context.py

会话认证状态 - 显式传递的上下文对象，不使用进程级单例

- AuthContext: 某一时刻的不可变快照（用户、角色、有效权限、是否需重置密码）
- AuthStateManager: 会话生命周期 start → on_session_change → sign_out
  每次会话变更递增 generation，角色加载以 asyncio 任务在会话状态提交后立即调度；
  加载完成时若 generation 已过期则丢弃结果（后发起的导航优先）。
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, FrozenSet, Iterable, List, Optional, Tuple

from core.security.permission import PermissionKey, has_permission, has_role, permission_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionInfo:
    """已认证会话的身份信息"""
    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class LoadedAuthState:
    """loader 返回的角色/权限数据；默认值表示无任何权限"""
    roles: Tuple[str, ...] = ()
    permissions: FrozenSet[str] = frozenset()
    password_reset_required: bool = False


AuthStateLoader = Callable[[str], Awaitable[LoadedAuthState]]


@dataclass(frozen=True)
class AuthContext:
    """
    认证上下文（只读派生数据）

    Attributes:
        user_id: 用户ID，未登录为 None
        email: 登录邮箱
        roles: 当前有效角色名
        permissions: 有效权限集合（所有有效角色权限的并集）
        password_reset_required: 是否必须先修改密码
        is_loading: 角色/权限仍在加载中
    """

    user_id: Optional[str] = None
    email: Optional[str] = None
    roles: Tuple[str, ...] = ()
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    password_reset_required: bool = False
    is_loading: bool = False

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def loading(cls, session: Optional[SessionInfo] = None) -> "AuthContext":
        if session is None:
            return cls(is_loading=True)
        return cls(user_id=session.user_id, email=session.email, is_loading=True)

    @classmethod
    def build(
        cls,
        user_id: str,
        email: Optional[str] = None,
        roles: Iterable[str] = (),
        permissions: Iterable[PermissionKey] = (),
        password_reset_required: bool = False,
    ) -> "AuthContext":
        return cls(
            user_id=user_id,
            email=email,
            roles=tuple(roles),
            permissions=frozenset(permission_key(p) for p in permissions),
            password_reset_required=password_reset_required,
        )

    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def has_permission(self, key: PermissionKey) -> bool:
        return has_permission(self.permissions, key)

    def has_role(self, name: str) -> bool:
        return has_role(self.roles, name)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "roles": list(self.roles),
            "permissions": sorted(self.permissions),
            "password_reset_required": self.password_reset_required,
            "is_loading": self.is_loading,
        }


class AuthStateManager:
    """
    会话认证状态管理器

    由持有 UI 树（或请求）的一方创建并显式传递，订阅者通过回调拿到新的 AuthContext。

    Example:
        >>> manager = AuthStateManager(loader)
        >>> manager.start(SessionInfo(user_id="u1"))
        >>> await manager.wait_until_loaded()
        >>> manager.current.has_permission("rooms.view")
    """

    def __init__(self, loader: AuthStateLoader):
        self._loader = loader
        self._session: Optional[SessionInfo] = None
        self._context = AuthContext.loading()
        self._generation = 0
        self._task: Optional["asyncio.Task[None]"] = None
        self._subscribers: List[Callable[[AuthContext], None]] = []

    @property
    def current(self) -> AuthContext:
        return self._context

    @property
    def session(self) -> Optional[SessionInfo]:
        return self._session

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, callback: Callable[[AuthContext], None]) -> Callable[[], None]:
        """订阅上下文变更，返回取消订阅函数"""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def start(self, session: Optional[SessionInfo]) -> None:
        """以已有会话（或无会话）初始化"""
        self.on_session_change(session)

    def on_session_change(self, session: Optional[SessionInfo]) -> None:
        """会话变更：先提交会话状态，再调度角色加载"""
        self._generation += 1
        generation = self._generation
        self._session = session

        if session is None:
            self._task = None
            self._publish(AuthContext.anonymous())
            return

        self._publish(AuthContext.loading(session))
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._load(generation, session))

    def sign_out(self) -> None:
        self.on_session_change(None)

    async def refresh(self) -> AuthContext:
        """重新加载当前会话的角色/权限（如管理员刚修改了角色分配）"""
        if self._session is None:
            return self._context
        self.on_session_change(self._session)
        await self.wait_until_loaded()
        return self._context

    async def wait_until_loaded(self) -> AuthContext:
        """等待当前进行中的加载完成"""
        while self._task is not None and not self._task.done():
            await self._task
        return self._context

    async def _load(self, generation: int, session: SessionInfo) -> None:
        try:
            state = await self._loader(session.user_id)
        except Exception:
            # 加载失败按无权限处理，不自动重试
            logger.exception(f"Failed to load roles for user {session.user_id}")
            state = LoadedAuthState()

        if generation != self._generation:
            logger.debug(
                f"Discarding stale auth state for user {session.user_id} "
                f"(generation {generation}, current {self._generation})"
            )
            return

        self._publish(AuthContext.build(
            user_id=session.user_id,
            email=session.email,
            roles=state.roles,
            permissions=state.permissions,
            password_reset_required=state.password_reset_required,
        ))

    def _publish(self, context: AuthContext) -> None:
        self._context = context
        for callback in list(self._subscribers):
            callback(context)


__all__ = [
    "SessionInfo",
    "LoadedAuthState",
    "AuthStateLoader",
    "AuthContext",
    "AuthStateManager",
]
