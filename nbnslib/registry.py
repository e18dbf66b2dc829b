"""Book-keeping of the shares and open files of an SMB session."""

from __future__ import annotations

from dataclasses import dataclass, field

_U16 = 0xFFFF


def _check_u16(value: int, what: str) -> int:
    value = int(value)
    if not 0 <= value <= _U16:
        raise ValueError(f"{what} out of range: {value!r}")
    return value


def make_fd(tid: int, fid: int) -> int:
    """Combine a tree id and a file id into a session-wide file descriptor.

    The tree id occupies the high 16 bits and the file id the low 16 bits.
    """
    return (_check_u16(tid, "tree id") << 16) | _check_u16(fid, "file id")


def fd_tid(fd: int) -> int:
    """Return the tree id part of a file descriptor."""
    return (int(fd) >> 16) & _U16


def fd_fid(fd: int) -> int:
    """Return the file id part of a file descriptor."""
    return int(fd) & _U16


@dataclass
class SmbFile:
    """An open file, or a file status, within a share."""

    name: str = ""
    fid: int = 0
    tid: int = 0
    created: int = 0
    accessed: int = 0
    written: int = 0
    changed: int = 0
    alloc_size: int = 0
    size: int = 0
    attr: int = 0
    offset: int = 0
    is_dir: bool = False

    @property
    def fd(self) -> int:
        """The session-wide descriptor of this file."""
        return make_fd(self.tid, self.fid)


@dataclass
class SmbShare:
    """A share connected within a session, with the files open on it."""

    tid: int
    opts: int = 0
    rights: int = 0
    guest_rights: int = 0
    files: list[SmbFile] = field(default_factory=list)


class ShareRegistry:
    """Maps tree ids to shares and file descriptors to open files."""

    def __init__(self) -> None:
        self._shares: list[SmbShare] = []

    def add_share(self, share: SmbShare) -> None:
        """Register a share after the ones already known."""
        if share is None:
            raise ValueError("share must not be None")
        self._shares.append(share)

    def get_share(self, tid: int) -> SmbShare | None:
        """Return the first share with this tree id, or None."""
        return next((s for s in self._shares if s.tid == tid), None)

    def remove_share(self, tid: int) -> SmbShare | None:
        """Forget the first share with this tree id and return it, or None."""
        share = self.get_share(tid)
        if share is not None:
            self._shares.remove(share)
        return share

    def clear(self) -> None:
        """Forget every share and every file open on them."""
        for share in self._shares:
            share.files.clear()
        self._shares.clear()

    def add_file(self, tid: int, file: SmbFile) -> None:
        """Register an open file on the share with this tree id.

        Raises KeyError if no such share is registered.
        """
        if file is None:
            raise ValueError("file must not be None")
        share = self.get_share(tid)
        if share is None:
            raise KeyError(f"no share with tree id {tid}")
        share.files.append(file)

    def _share_for_fd(self, fd: int) -> SmbShare | None:
        if not fd:
            raise ValueError("invalid file descriptor 0")
        return self.get_share(fd_tid(fd))

    def get_file(self, fd: int) -> SmbFile | None:
        """Return the open file behind a descriptor, or None."""
        share = self._share_for_fd(fd)
        if share is None:
            return None
        fid = fd_fid(fd)
        return next((f for f in share.files if f.fid == fid), None)

    def remove_file(self, fd: int) -> SmbFile | None:
        """Forget the open file behind a descriptor and return it, or None."""
        share = self._share_for_fd(fd)
        if share is None:
            return None
        fid = fd_fid(fd)
        for index, candidate in enumerate(share.files):
            if candidate.fid == fid:
                return share.files.pop(index)
        return None