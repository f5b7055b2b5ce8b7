"""
AskDeploy backend application package
问诊后端应用包
"""
