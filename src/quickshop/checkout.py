"""Page and checkout-step navigation.

Transitions are pure: ``transition`` maps a state and an event to the next state plus the
side effects the session must apply (commit the quick shop, schedule an auto-advance, reset
the session after confirmation).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Page(StrEnum):
  FAVOURITES = "favourites"
  QUICK_SHOP = "quickshop"
  FOOD_DRINK = "fooddrink"
  HOUSEHOLD = "household"
  TROLLEY = "trolley"


class CheckoutStep(StrEnum):
  TROLLEY = "trolley"
  CHECKOUT = "checkout"
  CONFIRMATION = "confirmation"


class CheckoutEvent(StrEnum):
  VIEW_MORE = "view_more"
  OPEN_QUICK_SHOP = "open_quick_shop"
  OPEN_FAVOURITES = "open_favourites"
  OPEN_TROLLEY = "open_trolley"
  NEXT_STEP = "next_step"
  REVIEW_TROLLEY = "review_trolley"
  CHECKOUT = "checkout"
  EDIT_TROLLEY = "edit_trolley"
  PLACE_ORDER = "place_order"
  BACK_TO_FAVOURITES = "back_to_favourites"
  CONTINUE_SHOPPING = "continue_shopping"
  # Fired by the quick-shop auto-advance timer.
  AUTO_ADVANCE = "auto_advance"


class Effect(StrEnum):
  COMMIT_VISIBLE = "commit_visible"
  SCHEDULE_ADVANCE = "schedule_advance"
  RESET_SESSION = "reset_session"


class InvalidTransitionError(ValueError):
  def __init__(self, state: CheckoutState, event: CheckoutEvent, reason: str | None = None) -> None:
    self.state = state
    self.event = event
    detail = f": {reason}" if reason else ""
    super().__init__(f"Cannot apply {event.value} on {state.label}{detail}")


@dataclass(slots=True, frozen=True)
class CheckoutState:
  page: Page = Page.FAVOURITES
  # Only meaningful while page is TROLLEY.
  step: CheckoutStep = CheckoutStep.TROLLEY

  @property
  def label(self) -> str:
    if self.page is Page.TROLLEY:
      return f"{self.page.value}.{self.step.value}"
    return self.page.value

  def on(self, page: Page, step: CheckoutStep = CheckoutStep.TROLLEY) -> CheckoutState:
    return CheckoutState(page=page, step=step)


INITIAL_STATE = CheckoutState()


@dataclass(slots=True, frozen=True)
class TransitionContext:
  """Derived values the guards read; computed by the caller from current state."""

  all_quick_shop_committed: bool = False
  success_pending: bool = False
  trolley_empty: bool = False
  below_minimum_spend: bool = False
  allow_collection_below_minimum: bool = True


@dataclass(slots=True, frozen=True)
class Transition:
  state: CheckoutState
  effects: tuple[Effect, ...] = field(default_factory=tuple)


def transition(
  state: CheckoutState,
  event: CheckoutEvent,
  context: TransitionContext | None = None,
) -> Transition:
  ctx = context or TransitionContext()

  # Navigation available from every page.
  if event in (CheckoutEvent.CONTINUE_SHOPPING, CheckoutEvent.OPEN_FAVOURITES):
    return Transition(state.on(Page.FAVOURITES))
  if event is CheckoutEvent.OPEN_TROLLEY:
    return Transition(state.on(Page.TROLLEY))
  if event is CheckoutEvent.OPEN_QUICK_SHOP:
    return Transition(state.on(Page.QUICK_SHOP))

  match state.page, event:
    case Page.FAVOURITES, CheckoutEvent.VIEW_MORE:
      return Transition(state.on(Page.QUICK_SHOP))
    case Page.QUICK_SHOP, CheckoutEvent.NEXT_STEP:
      if ctx.all_quick_shop_committed and not ctx.success_pending:
        return Transition(state.on(Page.FOOD_DRINK))
      return Transition(state, (Effect.COMMIT_VISIBLE, Effect.SCHEDULE_ADVANCE))
    case Page.QUICK_SHOP, CheckoutEvent.AUTO_ADVANCE:
      return Transition(state.on(Page.FOOD_DRINK))
    case Page.FOOD_DRINK, CheckoutEvent.NEXT_STEP:
      return Transition(state.on(Page.HOUSEHOLD))
    case Page.HOUSEHOLD, CheckoutEvent.REVIEW_TROLLEY:
      return Transition(state.on(Page.TROLLEY))
    case _:
      pass

  if state.page is Page.TROLLEY:
    return _trolley_transition(state, event, ctx)
  raise InvalidTransitionError(state, event)


def _trolley_transition(
  state: CheckoutState, event: CheckoutEvent, ctx: TransitionContext
) -> Transition:
  match state.step, event:
    case CheckoutStep.TROLLEY, CheckoutEvent.CHECKOUT:
      if ctx.trolley_empty:
        raise InvalidTransitionError(state, event, "trolley is empty")
      if ctx.below_minimum_spend and not ctx.allow_collection_below_minimum:
        raise InvalidTransitionError(state, event, "below minimum spend")
      return Transition(state.on(Page.TROLLEY, CheckoutStep.CHECKOUT))
    case CheckoutStep.CHECKOUT, CheckoutEvent.EDIT_TROLLEY:
      return Transition(state.on(Page.TROLLEY, CheckoutStep.TROLLEY))
    case CheckoutStep.CHECKOUT, CheckoutEvent.PLACE_ORDER:
      return Transition(state.on(Page.TROLLEY, CheckoutStep.CONFIRMATION))
    case CheckoutStep.CONFIRMATION, CheckoutEvent.BACK_TO_FAVOURITES:
      return Transition(INITIAL_STATE, (Effect.RESET_SESSION,))
    case _:
      raise InvalidTransitionError(state, event)


__all__ = [
  "INITIAL_STATE",
  "CheckoutEvent",
  "CheckoutState",
  "CheckoutStep",
  "Effect",
  "InvalidTransitionError",
  "Page",
  "Transition",
  "TransitionContext",
  "transition",
]
