# chantier/schemas/api_result.py
from typing import Any, Optional
from pydantic import BaseModel
from chantier.schemas.error_type import ErrorType

class ApiResult(BaseModel):
    '''
    接口返回结果的结构化表达

    参数	说明
    ok: bool  - 这次调用是否完成预期操作？
    error_type: Optional[ErrorType] - 错误类型的结构化记录
    error_message: Optional[str] - 面向用户的可读解释，报错信息
    data: Optional[Any] - 调用的结构化数据结果
    warning: Optional[str] - 存储读写失败时的降级提示（读取失败时数据可能不完整）
    '''
    ok: bool  # 是否成功完成

    error_type: Optional[ErrorType] = None
    error_message: Optional[str] = None

    data: Optional[Any] = None
    warning: Optional[str] = None
