"""
Pipeline package for the annotation relay.

Contains:
- `state`    : Typed `AnnotationState` definition
- `features` : Feature-list parser and `InvalidFeatureError`
- `nodes`    : LangGraph node callables operating over `AnnotationState`
- `graph`    : StateGraph builder bound to an `AnnotationClient`
"""
