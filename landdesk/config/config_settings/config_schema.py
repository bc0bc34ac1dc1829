from typing import Dict, Optional, Literal

from pydantic import BaseModel, Field, model_validator


class StorageCapabilities(BaseModel):
    """对象存储服务之间的行为差异。默认值对应 MinIO / AWS S3。"""

    supports_acl: bool = Field(True, description="上传时是否可以附带 ACL (Cloudflare R2 不支持)")
    supports_bucket_creation: bool = Field(True, description="启动时是否检查并创建 bucket")
    supports_cdn_rewrite: bool = Field(True, description="配置了 cdn_base_url 时是否用它生成附件 URL")
    signature_version: Literal["v2", "v4"] = "v4"
    path_style: Literal["auto", "path", "virtual"] = Field("auto", description="本地 MinIO 通常需要 'path'")


class S3Params(BaseModel):
    # endpoint / public_endpoint / cdn_base_url 都不带协议；AWS S3 时 endpoint 留空
    endpoint: Optional[str] = None
    region: str = "us-east-1"
    access_key: str
    secret_key: str
    bucket_name: str
    secure: bool = True

    # 附件链接要求公开可读；R2 需设为 None
    default_acl: Optional[str] = "public-read"

    public_endpoint: Optional[str] = None
    cdn_base_url: Optional[str] = None
    secure_cdn: bool = True

    connect_timeout: int = 60
    read_timeout: int = 60

    capabilities: StorageCapabilities = Field(default_factory=StorageCapabilities)


class S3ClientConfig(BaseModel):
    type: Literal['minio', 's3']
    params: S3Params


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    api_prefix: str = "/api/v1"
    env: str = "dev"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class DatabaseConfig(BaseModel):
    url: str
    echo: bool = False


class LoggingConfig(BaseModel):
    enable_file: bool = True
    log_dir: str = "../logs"
    rotation: str = "1 week"
    retention: str = "1 month"


class SingleRedisConfig(BaseModel):
    """
    单个 Redis 客户端的配置模型。
    同时支持直接提供 URL 或提供独立参数进行拼接。
    """
    url: Optional[str] = Field(None, description="完整的Redis连接URL，如果提供，将优先使用此配置。")

    host: Optional[str] = Field("localhost", description="Redis 主机 (当 url 未提供时使用)")
    port: Optional[int] = Field(6379, description="Redis 端口 (当 url 未提供时使用)")
    db: Optional[int] = Field(0, description="数据库编号 (当 url 未提供时使用)")
    password: Optional[str] = Field(None, description="密码 (当 url 未提供时使用)")

    max_connections: int = 10
    socket_timeout: int = 5
    socket_connect_timeout: int = 5
    serializer: str = "json"

    _final_url: str = ""

    @model_validator(mode='after')
    def validate_and_build_url(self) -> 'SingleRedisConfig':
        if self.url:
            self._final_url = self.url
            return self

        if not self.host or self.port is None:
            raise ValueError("If 'url' is not provided, 'host' and 'port' must be set.")

        auth_part = f":{self.password}@" if self.password else ""
        self._final_url = f"redis://{auth_part}{self.host}:{self.port}/{self.db or 0}"
        return self

    @property
    def final_url(self) -> str:
        return self._final_url


class RedisConfig(BaseModel):
    """主 Redis 配置模型，容纳多个命名的 SingleRedisConfig。"""
    clients: Dict[str, SingleRedisConfig] = Field(default_factory=dict)


class CacheConfig(BaseModel):
    """读缓存配置。memory 为进程内缓存，redis 则复用 redis.clients 中的某个客户端。"""
    backend: Literal["memory", "redis"] = "memory"
    ttl_seconds: int = Field(300, gt=0)
    recent_activity_window_seconds: int = Field(120, ge=0, description="近期上传活动窗口，命中则在读取时清空缓存")
    namespace: str = "landdesk"
    redis_client: str = "default"


class TaskConfig(BaseModel):
    worker_count: int = Field(4, ge=1, description="后台上传任务的 worker 数量")


class UploadConfig(BaseModel):
    max_file_size_mb: int = Field(50, gt=0, description="单个文件的最大大小 (MB)")


class StorageProfileConfig(BaseModel):
    """单个存储策略的配置"""
    client: str = Field(..., description="该策略使用的客户端名称")
    default_folder: str = Field(..., description="默认存储的文件夹")


# ========================================================================================
#
#   顶层配置：与 config.yaml 的一级 key 一一对应
#
# ========================================================================================
class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    tasks: TaskConfig = Field(default_factory=TaskConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    storage_clients: Dict[str, S3ClientConfig] = Field(default_factory=dict)
    storage_profiles: Dict[str, StorageProfileConfig] = Field(default_factory=dict)
