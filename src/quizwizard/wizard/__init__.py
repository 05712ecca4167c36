"""Wizard package."""

from quizwizard.wizard.flow import StepFlowController, run_wizard
from quizwizard.wizard.state import StepNavigation, WizardContext, WizardStep

__all__ = ["StepFlowController", "StepNavigation", "WizardContext", "WizardStep", "run_wizard"]
