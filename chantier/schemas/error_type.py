from enum import Enum

class ErrorType(str, Enum):
    '''
    请求处理过程中可能出现的问题的结构化分类与表达

    参数	说明
    INPUT_ERROR: 用户输入不符合要求（备份文件格式错误、确认码错误）
    VALIDATION_ERROR: 表单字段缺失或取值非法，只在表单边界产生
    NOT_FOUND: 实体不存在
    PERSISTENCE_ERROR: 存储读写失败（配额不足、存储不可用），已降级为仅内存状态
    DOCUMENT_ERROR: PDF / QR 生成失败
    SYSTEM_ERROR: 未知异常或未分类异常
    '''
    # 输入问题
    INPUT_ERROR = "INPUT_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # 业务问题
    NOT_FOUND = "NOT_FOUND"

    # 系统问题
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    DOCUMENT_ERROR = "DOCUMENT_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"
