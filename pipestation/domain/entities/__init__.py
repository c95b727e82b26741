"""Domain 实体

导出所有领域实体，方便其他模块导入
"""

from pipestation.domain.entities.pipe import Pipe
from pipestation.domain.entities.pipeline import UNSET, Pipeline, PipelineDefinition
from pipestation.domain.entities.pipeline_node import PipelineNode
from pipestation.domain.entities.push_subscription import PushSubscription
from pipestation.domain.entities.trigger import Trigger
from pipestation.domain.entities.webhook import Webhook

__all__ = [
    "Pipe",
    "Pipeline",
    "PipelineDefinition",
    "PipelineNode",
    "PushSubscription",
    "Trigger",
    "UNSET",
    "Webhook",
]
