# tdl/prelude.py
"""
Framework types every TDL snapshot can refer to without declaring them.

Each entry declares only the facts the value-semantics engine looks at.
The well-known wrappers declare their own ``Equals`` on purpose: they
are still classified as failing, because that equality compares the
underlying reference rather than the contents.
"""

PRELUDE_FILENAME = "<prelude>"

PRELUDE_SOURCE = r"""
// ── value types with content equality ─────────────────────────────
struct System.Decimal        { bool Equals(Decimal other); }
struct System.DateTime       { bool Equals(DateTime other); }
struct System.DateTimeOffset { bool Equals(DateTimeOffset other); }
struct System.TimeSpan       { bool Equals(TimeSpan other); }
struct System.Guid           { bool Equals(Guid other); }
struct System.DateOnly       { bool Equals(DateOnly other); }
struct System.TimeOnly       { bool Equals(TimeOnly other); }

// ── wrappers whose equality is reference equality ─────────────────
struct System.ArraySegment<T>    { T[] Array; bool Equals(ArraySegment<T> other); }
struct System.Memory<T>          { bool Equals(Memory<T> other); }
struct System.ReadOnlyMemory<T>  { bool Equals(ReadOnlyMemory<T> other); }
readonly struct System.Collections.Immutable.ImmutableArray<T> {
    T[] array;
    bool Equals(ImmutableArray<T> other);
}

// ── collections (reference equality) ──────────────────────────────
interface System.IEquatable<T> { bool Equals(T other); }
interface System.Collections.Generic.IEnumerable<T> { }
interface System.Collections.Generic.IReadOnlyList<T> { }
class System.Collections.Generic.List<T> { }
class System.Collections.Generic.Dictionary<TKey, TValue> { }
class System.Collections.Generic.HashSet<T> { }
"""
