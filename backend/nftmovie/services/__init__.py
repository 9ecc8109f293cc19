"""Remote clients and the batch conversion workflow.

The conversion path follows the async task pattern:
  submit task → poll status on a fixed interval → collect terminal outcome
"""
