"""Push 订阅 DTO"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SubscriptionKeysDTO(BaseModel):
    p256dh: str = Field(..., min_length=1)
    auth: str = Field(..., min_length=1)


class SubscribeRequest(BaseModel):
    """浏览器 PushSubscription.toJSON() 的结构"""

    endpoint: str = Field(..., min_length=1)
    keys: SubscriptionKeysDTO


class UnsubscribeRequest(BaseModel):
    endpoint: str = Field(..., min_length=1)


class SubscriptionRef(BaseModel):
    id: str


class SubscribeResponse(BaseModel):
    subscription: SubscriptionRef


class VapidKeyResponse(BaseModel):
    public_key: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
