from abc import ABC, abstractmethod
from typing import BinaryIO, Dict, Optional


class StorageClientInterface(ABC):
    """
    存储客户端统一接口 (同步 API，由上层放入线程池执行)。
    """

    @abstractmethod
    def put_object(self, object_name: str, data: BinaryIO, length: int, content_type: str) -> Dict:
        """
        上传一个对象（文件）。
        :return: 包含 etag 等信息的字典。
        """
        pass

    @abstractmethod
    def remove_object(self, object_name: str):
        """删除一个对象。"""
        pass

    @abstractmethod
    def build_final_url(self, object_name: str) -> Optional[str]:
        """构建最终的可公开访问 URL。"""
        pass
