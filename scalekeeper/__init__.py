"""爬宠饲养记录核心。"""
__version__ = "0.1.0"
