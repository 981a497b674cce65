"""
The orthostatic test: a three-step sequence that records the lying and
standing heart rate and classifies the increase.

The wizard only tracks progress. Saving the resulting readings is done by
`PotsLogService.complete_orthostatic_test`.
"""
# potslog/wizard.py

from potslog.aggregator import classify_orthostatic
from potslog.models import parse_positive_int

AWAITING_LYING = "awaiting_lying"
AWAITING_STANDING = "awaiting_standing"
COMPLETE = "complete"


class OrthostaticTest:
    """State of one orthostatic test run.

    Attributes:
        state (str): AWAITING_LYING, AWAITING_STANDING or COMPLETE.
        lying_heart_rate (int or None): Set after the first step.
        standing_heart_rate (int or None): Set after the second step.
        result (OrthostaticResult or None): Set once complete.
    """
    def __init__(self):
        self.reset()

    def reset(self):
        """Starts over. Readings already saved by a completed test are kept."""
        self.state = AWAITING_LYING
        self.lying_heart_rate = None
        self.standing_heart_rate = None
        self.result = None

    @property
    def step(self):
        return {AWAITING_LYING: 1, AWAITING_STANDING: 2, COMPLETE: 3}[self.state]

    def _expect(self, state):
        if self.state != state:
            raise RuntimeError(f"Orthostatic test is in state '{self.state}', expected '{state}'")

    def submit_lying(self, raw):
        """Records the lying heart rate and moves to the standing step.

        Raises:
            MissingInputError: If the value is not a positive integer. The state is unchanged.
        """
        self._expect(AWAITING_LYING)
        self.lying_heart_rate = parse_positive_int(raw, "heart rate")
        self.state = AWAITING_STANDING

    def submit_standing(self, raw):
        """Records the standing heart rate and completes the test.

        Returns:
            OrthostaticResult: The heart-rate increase and its classification.

        Raises:
            MissingInputError: If the value is not a positive integer. The state is unchanged.
        """
        self._expect(AWAITING_STANDING)
        standing = parse_positive_int(raw, "heart rate")
        self.result = classify_orthostatic(self.lying_heart_rate, standing)
        self.standing_heart_rate = standing
        self.state = COMPLETE
        return self.result
