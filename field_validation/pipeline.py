"""Ordered check execution with first-failure or accumulate-all aggregation."""

import logging
import time
from typing import Any, Iterable

from .errors import ConfigurationError
from .outcome import Outcome
from .rules.base import AggregationMode, Check

logger = logging.getLogger(__name__)


class CheckPipeline:
    """Executes an ordered check list against a value with timing"""

    def run(
        self,
        value: Any,
        checks: Iterable[Check],
        mode: AggregationMode = AggregationMode.FIRST_FAILURE,
        context=None,
    ) -> Outcome:
        """
        Run checks in the order given.

        Args:
            value: The value under validation
            checks: Ordered checks; order is evaluation order
            mode: FIRST_FAILURE stops at and returns the first failure,
                ACCUMULATE evaluates every check and collects all failures
            context: FieldContext passed through to each rule

        Returns:
            Outcome. An empty check list always passes.

        Raises:
            ConfigurationError: Propagated from any rule
        """
        outcome = Outcome.ok()
        for check in checks:
            result = self._execute_check(value, check, context)
            if result.passed:
                continue
            if mode is AggregationMode.FIRST_FAILURE:
                return result
            outcome = outcome.merge(result)
        return outcome

    def _execute_check(self, value: Any, check: Check, context) -> Outcome:
        """Execute a single check, converting unexpected rule errors into failures."""
        start = time.time()
        try:
            result = check.rule.evaluate(value, check.params, context)
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning(
                f"Check '{check.name}' raised {type(e).__name__}: {e}; reporting as failure",
                extra={"check": check.name, "rule": repr(check.rule)},
            )
            result = check.rule.fail(check.params)
        elapsed_ms = round((time.time() - start) * 1000, 2)

        logger.debug(
            f"Check '{check.name}' {'passed' if result.passed else 'failed'} in {elapsed_ms}ms"
        )
        return result
