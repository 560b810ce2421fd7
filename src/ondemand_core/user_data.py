"""
Boot script for the EFS maintenance host
"""

EFS_MOUNT_POINT = "/mnt/efs/fs1"
MOUNT_RETRY_COUNT = 15
MOUNT_RETRY_WAIT_SECONDS = 30

NFS_MOUNT_OPTIONS = (
    "nfsvers=4.1,rsize=1048576,wsize=1048576,hard,timeo=600,retrans=2,noresvport,_netdev"
)


def render_efs_maintenance_user_data(
    file_system_id: str,
    region: str,
    mount_point: str = EFS_MOUNT_POINT,
    retry_count: int = MOUNT_RETRY_COUNT,
    retry_wait_seconds: int = MOUNT_RETRY_WAIT_SECONDS,
) -> str:
    """
    cloud-config that installs an EFS/NFS client and mounts the shared file system.

    The fstab entry uses the efs mount helper when it is installed and falls
    back to plain NFS 4.1. The mount is retried a bounded number of times;
    after that the instance is left running, unmounted, for inspection.
    """
    efs_entry = f"\\n${{file_system_id_1}}:/ ${{efs_mount_point_1}} efs iam,tls,_netdev\\n"
    nfs_entry = (
        f"\\n${{file_system_id_1}}.efs.{region}.amazonaws.com:/ ${{efs_mount_point_1}} "
        f"nfs4 {NFS_MOUNT_OPTIONS} 0 0\\n"
    )

    lines = [
        "#cloud-config",
        "package_update: true",
        "package_upgrade: true",
        "runcmd:",
        "- yum install -y amazon-efs-utils",
        "- apt-get -y install amazon-efs-utils",
        "- yum install -y nfs-utils",
        "- apt-get -y install nfs-common",
        f"- file_system_id_1={file_system_id}",
        f"- efs_mount_point_1={mount_point}",
        '- mkdir -p "${efs_mount_point_1}"',
        f'- test -f "/sbin/mount.efs" && printf "{efs_entry}" >> /etc/fstab'
        f' || printf "{nfs_entry}" >> /etc/fstab',
        "- test -f \"/sbin/mount.efs\" && grep -ozP 'client-info]\\nsource'"
        " '/etc/amazon/efs/efs-utils.conf'; if [ $? -eq 1 ]; then"
        ' printf "\\n[client-info]\\nsource=liw\\n" >> /etc/amazon/efs/efs-utils.conf; fi;',
        # runcmd executes under /bin/sh, which is dash on Debian/Ubuntu
        f"- retryCnt={retry_count}; waitTime={retry_wait_seconds}; while true;"
        " do mount -a -t efs,nfs4 defaults;"
        " if [ $? -eq 0 ]; then echo File system mounted successfully; break; fi;"
        " if [ $retryCnt -lt 1 ]; then echo File system not available, giving up; break; fi;"
        " echo File system not available, retrying to mount.; retryCnt=$((retryCnt-1)); sleep $waitTime; done;",
    ]
    return "\n".join(lines) + "\n"
