from .template import PromptTemplate, PromptTemplateError

__all__ = ["PromptTemplate", "PromptTemplateError"]
