from typing import BinaryIO, Dict, Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError

from landdesk.config.config_settings.config_schema import S3ClientConfig, S3Params
from landdesk.core.logger import logger
from landdesk.infra.storage.storage_interface import StorageClientInterface
from landdesk.utils.url_builder import build_public_storage_url

SIGNATURE_VERSIONS = {"v4": "s3v4", "v2": "s3"}


def _with_scheme(host: Optional[str], secure: bool) -> Optional[str]:
    if not host:
        return None
    return f"{'https' if secure else 'http'}://{host}"


def build_boto_client(params: S3Params):
    """按 StorageCapabilities 创建同步 boto3 S3 client。"""
    caps = params.capabilities
    boto_config = BotoConfig(
        signature_version=SIGNATURE_VERSIONS.get(caps.signature_version, "s3v4"),
        # boto3 用 None 表示 auto
        s3={"addressing_style": None if caps.path_style == "auto" else caps.path_style},
        connect_timeout=params.connect_timeout,
        read_timeout=params.read_timeout,
    )
    return boto3.client(
        "s3",
        endpoint_url=_with_scheme(params.endpoint, params.secure),
        aws_access_key_id=params.access_key,
        aws_secret_access_key=params.secret_key,
        region_name=params.region,
        config=boto_config,
    )


class S3CompatibleClient(StorageClientInterface):
    """
    MinIO / AWS S3 附件存储客户端。

    所有方法都是同步的，由 S3ObjectStore 放入线程池调用。
    传入 s3_client 时直接使用它，不创建连接也不检查 bucket。
    """

    def __init__(self, config: S3ClientConfig, s3_client=None):
        self.s3_conf = config.params
        self.capabilities = self.s3_conf.capabilities
        self.bucket_name = self.s3_conf.bucket_name
        self.endpoint_url = _with_scheme(self.s3_conf.endpoint, self.s3_conf.secure)
        self.public_base_url = _with_scheme(self.s3_conf.public_endpoint, self.s3_conf.secure_cdn)

        if s3_client is not None:
            self.s3 = s3_client
            return

        self.s3 = build_boto_client(self.s3_conf)
        if self.capabilities.supports_bucket_creation:
            self.ensure_bucket()
        else:
            logger.debug(f"[S3] Bucket check skipped for '{self.bucket_name}'")

    def build_final_url(self, object_name: str) -> Optional[str]:
        return build_public_storage_url(
            object_name=object_name,
            cdn_base_url=self.s3_conf.cdn_base_url,
            public_base_url=self.public_base_url,
            internal_base_url=self.endpoint_url,
            bucket_name=self.bucket_name,
            capabilities=self.capabilities,
        )

    def put_object(self, object_name: str, data: BinaryIO, length: int, content_type: str) -> Dict:
        params = {
            "Bucket": self.bucket_name,
            "Key": object_name,
            "Body": data,
            "ContentLength": length,
            "ContentType": content_type,
        }
        # R2 等不支持 ACL 的服务必须省略该参数
        if self.capabilities.supports_acl and self.s3_conf.default_acl:
            params["ACL"] = self.s3_conf.default_acl

        logger.info(f"[S3] PUT {self.bucket_name}/{object_name} ({length} bytes, {content_type})")
        response = self.s3.put_object(**params)
        if response.get("ETag"):
            response["ETag"] = response["ETag"].strip('"')
        return response

    def remove_object(self, object_name: str):
        logger.info(f"[S3] DELETE {self.bucket_name}/{object_name}")
        return self.s3.delete_object(Bucket=self.bucket_name, Key=object_name)

    def ensure_bucket(self) -> None:
        try:
            self.s3.head_bucket(Bucket=self.bucket_name)
            return
        except ClientError as e:
            if e.response["Error"]["Code"] != "404":
                logger.error(f"[S3] Cannot check bucket '{self.bucket_name}': {e}")
                raise

        logger.info(f"[S3] Creating missing bucket '{self.bucket_name}'")
        create_kwargs = {"Bucket": self.bucket_name}
        # AWS S3 在 us-east-1 以外必须显式声明区域
        if not self.s3_conf.endpoint and self.s3_conf.region != "us-east-1":
            create_kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.s3_conf.region}
        self.s3.create_bucket(**create_kwargs)
