"""Pipeline 实体 - 流水线聚合根

业务定义：
- Pipeline 拥有一个 Trigger、一组节点（id 唯一）和一组 Pipe
- 定义快照 {trigger, nodes, pipes} 作为一个整体持久化
- is_public 为 true 时可以通过 share_token 被其他用户克隆；
  token 一旦分配就不会因取消公开而清除
- cloned_from 只是来源引用，不是所有权关系；clone_count 单调递增

设计原则：
- 纯 Python 实现，不依赖任何框架
- 通过工厂方法 create() 封装创建逻辑（分配 ID、分享 token）
- 所有结构问题一次性收集后抛出 ValidationError
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Final
from uuid import uuid4

from pipestation.domain.entities.pipe import Pipe
from pipestation.domain.entities.pipeline_node import PipelineNode
from pipestation.domain.entities.trigger import Trigger
from pipestation.domain.exceptions import ValidationError
from pipestation.domain.services.token_generator import generate_token

SHARE_TOKEN_SIZE: Final = 10
CLONE_SUFFIX: Final = " (Clone)"


class _Unset:
    """部分更新中"未提供"的标记（区别于显式的 None）"""

    _instance = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True)
class PipelineDefinition:
    """流水线定义快照"""

    trigger: Trigger
    nodes: tuple[PipelineNode, ...] = ()
    pipes: tuple[Pipe, ...] = ()

    # ==================== 解析 ====================

    @staticmethod
    def parse_trigger(data: Any) -> Trigger:
        if data is None:
            raise ValidationError(["trigger is required"])
        return Trigger.from_dict(data)

    @staticmethod
    def parse_nodes(data: Any) -> tuple[PipelineNode, ...]:
        if not isinstance(data, (list, tuple)):
            raise ValidationError(["nodes must be an array"])

        nodes: list[PipelineNode] = []
        errors: list[str] = []
        for index, item in enumerate(data):
            if not isinstance(item, Mapping):
                errors.append(f"nodes[{index}]: must be an object")
                continue
            try:
                nodes.append(PipelineNode.from_dict(item))
            except ValidationError as exc:
                errors.extend(f"nodes[{index}]: {message}" for message in exc.errors)
        if errors:
            raise ValidationError(errors)
        return tuple(nodes)

    @staticmethod
    def parse_pipes(data: Any) -> tuple[Pipe, ...]:
        if not isinstance(data, (list, tuple)):
            raise ValidationError(["pipes must be an array"])

        pipes: list[Pipe] = []
        errors: list[str] = []
        for index, item in enumerate(data):
            if not isinstance(item, Mapping):
                errors.append(f"pipes[{index}]: must be an object")
                continue
            pipes.append(Pipe.from_dict(item))
        if errors:
            raise ValidationError(errors)
        return tuple(pipes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineDefinition":
        """解析完整定义；trigger / nodes / pipes 的问题合并为一个 ValidationError"""
        errors: list[str] = []
        parsed: dict[str, Any] = {}
        parsers = (
            ("trigger", cls.parse_trigger),
            ("nodes", cls.parse_nodes),
            ("pipes", cls.parse_pipes),
        )
        for key, parser in parsers:
            try:
                parsed[key] = parser(data.get(key))
            except ValidationError as exc:
                errors.extend(exc.errors)
        if errors:
            raise ValidationError(errors)
        return cls(**parsed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trigger": self.trigger.to_dict(),
            "nodes": [node.to_dict() for node in self.nodes],
            "pipes": [pipe.to_dict() for pipe in self.pipes],
        }

    # ==================== 结构校验 ====================

    @property
    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def duplicate_node_errors(self) -> list[str]:
        seen: set[str] = set()
        errors = []
        for node in self.nodes:
            if node.id in seen:
                errors.append(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return errors

    def pipe_reference_errors(self) -> list[str]:
        node_ids = self.node_ids
        errors = []
        for pipe in self.pipes:
            if pipe.source_id not in node_ids:
                errors.append(f"Pipe {pipe.id} references unknown source node: {pipe.source_id}")
            if pipe.target_id not in node_ids:
                errors.append(f"Pipe {pipe.id} references unknown target node: {pipe.target_id}")
        return errors

    def structural_errors(self) -> list[str]:
        return self.duplicate_node_errors() + self.pipe_reference_errors()

    def ensure_structure(self, check_pipes: bool = True) -> None:
        """抛出：ValidationError（重复节点 id、Pipe 引用不存在的节点）"""
        errors = self.duplicate_node_errors()
        if check_pipes:
            errors += self.pipe_reference_errors()
        if errors:
            raise ValidationError(errors)

    def config_errors(self) -> dict[str, list[str]]:
        """各节点配置的校验错误（只包含有错误的节点）"""
        report = {}
        for node in self.nodes:
            errors = node.validate_config()
            if errors:
                report[node.id] = errors
        return report

    def merged_with(
        self,
        trigger: Trigger | None = None,
        nodes: tuple[PipelineNode, ...] | None = None,
        pipes: tuple[Pipe, ...] | None = None,
    ) -> "PipelineDefinition":
        """提供的部分替换，未提供的部分沿用当前快照"""
        return PipelineDefinition(
            trigger=trigger if trigger is not None else self.trigger,
            nodes=nodes if nodes is not None else self.nodes,
            pipes=pipes if pipes is not None else self.pipes,
        )


@dataclass
class Pipeline:
    """Pipeline 实体

    属性说明：
    - id: 唯一标识符（UUID）
    - user_id: 所有者
    - title / summary: 标题与说明
    - definition: 定义快照
    - is_public / share_token: 分享状态
    - cloned_from: 克隆来源的流水线 ID
    - clone_count: 被克隆次数
    """

    id: str
    user_id: str
    title: str
    definition: PipelineDefinition
    summary: str | None = None
    is_public: bool = False
    share_token: str | None = None
    cloned_from: str | None = None
    clone_count: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        user_id: str,
        title: str,
        definition: PipelineDefinition,
        summary: str | None = None,
        is_public: bool = False,
        share_token_size: int = SHARE_TOKEN_SIZE,
    ) -> "Pipeline":
        """创建 Pipeline 的工厂方法

        抛出：
            ValidationError: 标题为空或定义结构不合法
        """
        if not title or not title.strip():
            raise ValidationError(["title is required"])
        definition.ensure_structure()

        now = datetime.now(UTC)
        return cls(
            id=str(uuid4()),
            user_id=user_id,
            title=title.strip(),
            summary=summary,
            definition=definition,
            is_public=is_public,
            share_token=generate_token(share_token_size) if is_public else None,
            created_at=now,
            updated_at=now,
        )

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def apply_update(
        self,
        title: Any = UNSET,
        summary: Any = UNSET,
        definition: PipelineDefinition | None = None,
        is_public: Any = UNSET,
        share_token_size: int = SHARE_TOKEN_SIZE,
    ) -> None:
        """按字段合并更新（只覆盖显式提供的字段）

        - is_public 变为 true 且从未分配过 token 时分配一个
        - is_public 变为 false 不清除 token
        """
        if title is not UNSET:
            if not title or not str(title).strip():
                raise ValidationError(["title is required"])
            self.title = str(title).strip()
        if summary is not UNSET:
            self.summary = summary
        if definition is not None:
            self.definition = definition
        if is_public is not UNSET:
            self.is_public = bool(is_public)
            if self.is_public and not self.share_token:
                self.share_token = generate_token(share_token_size)
        self.updated_at = datetime.now(UTC)

    def clone_for(self, user_id: str) -> "Pipeline":
        """为 user_id 创建独立副本（私有、记录来源、计数归零）"""
        now = datetime.now(UTC)
        return Pipeline(
            id=str(uuid4()),
            user_id=user_id,
            title=f"{self.title}{CLONE_SUFFIX}",
            summary=self.summary,
            definition=self.definition,
            is_public=False,
            share_token=None,
            cloned_from=self.id,
            clone_count=0,
            created_at=now,
            updated_at=now,
        )

    def validation_report(self) -> dict[str, Any]:
        """结构问题、触发器配置问题与各节点配置问题的汇总

        定时触发附带换算出的 cron 表达式，其余触发器为 None
        """
        structure = self.definition.structural_errors()
        trigger = self.definition.trigger.config.validate()
        nodes = self.definition.config_errors()
        return {
            "valid": not (structure or trigger or nodes),
            "structure": structure,
            "trigger": trigger,
            "nodes": nodes,
            "cron": self.definition.trigger.config.to_cron_expression() or None,
        }
