"""
Scheduling core.

Modules:
- card: FlashCard, CardQueue, Answer, MemoryState
- states: CardState variants, SchedulingStates, Scheduler protocol
- sm2: Default SM-2 scheduler
- timing: Day index context derived from the creation stamp
- queue: Due-card queue builder
- collection: Answer application and application context
"""
