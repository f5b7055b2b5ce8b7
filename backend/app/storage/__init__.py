"""
Storage Module / 存储模块
File-backed collaborator stores for projects, deployments, resources,
code index, transcripts and project databases
基于文件的协作方存储（项目、部署、资源、代码索引、会话记录、项目数据库）
"""

from .projects import ProjectStorage, DeploymentStorage, ResourceStorage
from .code_index import CodeIndexStorage
from .transcripts import TranscriptStorage
from .sql_store import SqliteSqlStore

__all__ = [
    "ProjectStorage",
    "DeploymentStorage",
    "ResourceStorage",
    "CodeIndexStorage",
    "TranscriptStorage",
    "SqliteSqlStore",
]
