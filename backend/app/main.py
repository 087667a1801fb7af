"""
Hotel PMS 后端入口
授权模型（角色/权限/路由守卫）+ 数据库备份恢复
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import init_db, SessionLocal
from app.routers import auth
from app.system.routers import audit_router, rbac_router, backup_router, user_router

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时执行
    setup_logging(settings.LOG_LEVEL)
    init_db()

    # 内置角色
    from app.system.services.rbac_seed import seed_rbac_data
    seed_db = SessionLocal()
    try:
        seed_stats = seed_rbac_data(seed_db)
        if any(seed_stats.values()):
            logger.info(f"RBAC seed data initialized: {seed_stats}")
    finally:
        seed_db.close()

    yield


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="酒店管理系统后端：角色权限与数据备份恢复",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(auth.router)
app.include_router(rbac_router.permission_router)
app.include_router(rbac_router.role_router)
app.include_router(rbac_router.user_role_router)
app.include_router(user_router.router)
app.include_router(backup_router.router)
app.include_router(audit_router.router)


@app.get("/")
def root():
    """根路径"""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
