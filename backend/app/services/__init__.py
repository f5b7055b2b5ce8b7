"""
Services / 服务层
Ask coordinator, deployment resolver, evidence ledger, answer rules, synthesizer and code indexer
问答协调、部署解析、证据账本、答案规则、生成式增强与代码索引
"""
