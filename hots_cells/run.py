"""
Generic event processing.

A processor is any object with the following methods:

    - reset()
    - process(event, skip_check) -> list of events

The process function resets the processor, feeds it the events one at a time and
collects everything it emits.
"""

import numbers
import torch
from typing import List, Sequence, Union, Any
from tqdm import tqdm

from hots_cells.events import Event, Events


def _is_multi_sequence(events: Sequence) -> bool:
    """Tell a list of event sequences from a single sequence of events."""
    if len(events) == 0:
        return False
    first = events[0]
    if isinstance(first, Event):
        return False
    return len(first) == 0 or not isinstance(first[0], numbers.Number)


def process(processor: Any,
            events: Union[Sequence[Event], Sequence[Sequence[Event]]],
            skip_check: bool = False,
            show_progress: bool = False) -> Union[Events, List[Events]]:
    """
    Process events with a processor.

    Args:
        processor: Object exposing reset() and process(event, skip_check)
        events: A sequence of events, an (N, 4) array/tensor, or a list of sequences
        skip_check: If True, consider all events as valid
        show_progress: Whether to show a progress bar

    Returns:
        Events emitted by the processor, or one list per input sequence
    """
    # Convert to numpy if needed
    if isinstance(events, torch.Tensor):
        events = events.detach().cpu().numpy()

    if _is_multi_sequence(events):
        iterator = tqdm(events, desc="sequences") if show_progress else events
        return [process(processor, sequence, skip_check) for sequence in iterator]

    processor.reset()

    emitted = []
    iterator = tqdm(events, desc="events") if show_progress else events
    for event in iterator:
        emitted.extend(processor.process(Event(*(int(v) for v in event)), skip_check))

    return emitted
