"""
LLM Gateway / 大模型网关
Completion providers and error classification for the answer synthesizer
"""
