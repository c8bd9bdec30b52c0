"""Workflow definitions module."""

from workflows.erp_sync_workflow import ERPSyncWorkflow, ERPSyncWorkflowInput, TASK_QUEUE_ERP_SYNC

__all__ = ["ERPSyncWorkflow", "ERPSyncWorkflowInput", "TASK_QUEUE_ERP_SYNC"]
