"""
应用配置
从环境变量 / .env 读取配置
"""
from typing import List
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "Hotel PMS"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./hotel_pms.db"

    # JWT 配置
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 路由守卫跳转目标
    LOGIN_PATH: str = "/auth"
    RESET_PASSWORD_PATH: str = "/reset-password"

    # 管理员判定：角色名（大小写不敏感）或任一管理权限
    ADMIN_ROLE_NAMES: List[str] = ["administrator", "admin"]
    BACKUP_MANAGE_PERMISSIONS: List[str] = ["settings.manage", "staff.manage"]

    # 备份 / 恢复
    BACKUP_ROW_LIMIT: int = 10000  # 单表导出上限
    RESTORE_BATCH_SIZE: int = 500  # 每批插入行数

    model_config = ConfigDict(env_file=".env", case_sensitive=True)


# 全局设置实例
settings = Settings()
